"""
Azure Resource Manager provider

CRUD handlers for Cosmos DB SQL API resources, the MSSQL server transparent
data encryption protector and HDInsight Hadoop clusters, driven through
``arm_provider.provider.Provider`` or the ``arm-provider`` command line.
"""

__version__ = "0.1.0"
