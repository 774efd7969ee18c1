"""Treatment catalog and settings-defined treatment programs"""
