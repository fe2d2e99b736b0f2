"""
Blob Storage API: HTTP endpoints over Azure Blob Storage and Azure Cosmos DB.
"""

__version__ = "0.1.0"
__description__ = "HTTP pass-through to Azure Blob Storage and Cosmos DB"
