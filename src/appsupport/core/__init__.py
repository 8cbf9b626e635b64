"""Configuration, logging and signal plumbing shared by the storage layers."""

from appsupport.core.config import APP_NAME, StorageConfig, app_data_dir
from appsupport.core.delivery import (
    DeliveryClosed,
    DeliveryContext,
    ImmediateDelivery,
    ThreadedDelivery,
)
from appsupport.core.signals import Signal

__all__ = [
    "APP_NAME",
    "StorageConfig",
    "app_data_dir",
    "DeliveryClosed",
    "DeliveryContext",
    "ImmediateDelivery",
    "ThreadedDelivery",
    "Signal",
]
