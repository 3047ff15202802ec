"""
Position Search Services

This package contains the core Python services:
- shared: Database access, configuration and structured logging
- locations: US state gazetteer and city/state recognition
- organizations: Resolution of organization mentions to organization ids
- position_openings: Indexing, query parsing, ranking and result formatting
"""
