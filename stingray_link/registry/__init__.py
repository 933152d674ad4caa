from .connection_handler import ConnectionHandler as ConnectionHandler
from .instance_scanner import InstanceScanner as InstanceScanner
