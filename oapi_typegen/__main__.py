from oapi_typegen.cli import run

run()
