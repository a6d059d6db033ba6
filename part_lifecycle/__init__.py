"""
Part Lifecycle AI - enrich spreadsheets of part numbers with product link,
lifecycle status and datasheet URL
"""
__version__ = "0.1.0"
