"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdcite.cli.commands import ast_cmd, extract_file_cmd, extract_header_cmd, extract_links_cmd, validate_cmd


app = typer.Typer(name="mdcite", no_args_is_help=True, help="Markdown citation validation and content extraction")
extract_app = typer.Typer(no_args_is_help=True, help="Extract cited content into a deduplicated index")

app.command(name="validate")(validate_cmd)
app.command(name="ast")(ast_cmd)

extract_app.command(name="links")(extract_links_cmd)
extract_app.command(name="header")(extract_header_cmd)
extract_app.command(name="file")(extract_file_cmd)
app.add_typer(extract_app, name="extract")
