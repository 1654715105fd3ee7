"""
wow-addon-updater: keeps World of Warcraft addons up to date for the classic
and retail game clients.
"""

__version__ = "1.0.0"
