"""Contract tooling for the School ERP REST API"""

__version__ = "0.1.0"
