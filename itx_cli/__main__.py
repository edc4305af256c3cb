"""python -m itx_cli"""
from itx_cli.main import cli

cli(prog_name="itx")
