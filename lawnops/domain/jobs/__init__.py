"""Jobs (visits) and their treatment checklists"""
