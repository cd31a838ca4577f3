from sutradhar import create_app

app = create_app()
