APP_NAME = "litematic-converter"
__version__ = "0.1.0"
