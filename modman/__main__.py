from modman.cli.main import run

run()
