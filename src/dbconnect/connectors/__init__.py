"""Connector adapters for remote relational databases.

Each adapter wraps a SQLAlchemy engine for one connection profile and
offers connection probing, query execution and catalog introspection.
"""

from dbconnect.connectors.base import BaseConnector
from dbconnect.connectors.mysql import MySQLConnector
from dbconnect.connectors.oracle import OracleConnector
from dbconnect.connectors.postgres import PostgresConnector
from dbconnect.connectors.registry import ConnectorDispatcher, ConnectorRegistry, create_connector
from dbconnect.connectors.sqlserver import SQLServerConnector

__all__ = [
    "BaseConnector",
    "PostgresConnector",
    "MySQLConnector",
    "SQLServerConnector",
    "OracleConnector",
    "ConnectorRegistry",
    "ConnectorDispatcher",
    "create_connector",
]
