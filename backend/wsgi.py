from fittrack import create_app

app = create_app()
