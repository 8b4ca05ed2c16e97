import os

import pkg.helpers
import requests_not_installed
from pkg import core


def main():
    return core.run(os.getcwd())
