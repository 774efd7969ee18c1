"""Post-job customer feedback"""
