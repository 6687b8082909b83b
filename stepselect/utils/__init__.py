from .logger import setup_logger
from .helpers import save_object, load_object, save_json, load_json

__all__ = [
    'setup_logger',
    'save_object',
    'load_object',
    'save_json',
    'load_json'
]
