from drawyourmeme.cli import app

app()
