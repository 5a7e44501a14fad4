from garden.cli import app

app()
