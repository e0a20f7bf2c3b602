"""
System integration for dashmath.

A System owns the dataset manager and the API server built from one
configuration, and runs the server until it is stopped.
"""

import logging
import threading
from typing import Optional

from dashmath.components.config import Config, ConfigManager
from dashmath.components.server import Server
from dashmath.dataset import DatasetManager

# Set up logging
logger = logging.getLogger(__name__)


class System:
    """
    Dataset manager plus API server, started and stopped together.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the system.

        Args:
            config: Configuration for the system
        """
        self.config = config or ConfigManager.get_config()
        self.dataset_manager = DatasetManager(self.config)
        self.server = Server(self.dataset_manager, self.config)
        self._stopped = threading.Event()

    @property
    def running(self) -> bool:
        """Whether the API server is serving."""
        return self.server.running

    def start(self) -> None:
        """
        Start serving the API.
        """
        self._stopped.clear()
        self.server.start()
        logger.info("System started")

    def stop(self) -> None:
        """
        Stop the API server and release anyone waiting for shutdown.
        """
        self.server.stop()
        self._stopped.set()
        logger.info("System stopped")

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Block until stop() is called.

        Args:
            timeout: Seconds to wait, or None to wait forever

        Returns:
            True if the system was stopped
        """
        return self._stopped.wait(timeout)


class SystemManager:
    """
    Singleton manager for the system.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def start(cls, config: Optional[Config] = None) -> System:
        """
        Create the system if needed and start it.

        Args:
            config: Configuration for the system

        Returns:
            System instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = System(config)
            system = cls._instance

        system.start()
        return system

    @classmethod
    def stop(cls) -> None:
        """
        Stop and discard the system.
        """
        with cls._lock:
            system, cls._instance = cls._instance, None

        if system is not None:
            system.stop()
