from app.carrental import create_app

app = create_app()
