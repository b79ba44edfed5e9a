# module vodshop.app
from vodshop.app_setup.factory import create_app

app = create_app()
