"""Program templates, client program assignments and planned visits"""
