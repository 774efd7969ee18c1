"""Clients: properties serviced, with gate codes and rates shown by role"""
