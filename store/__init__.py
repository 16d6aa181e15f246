"""
Initialization of the store package, exposing the device directory, reading store and anomaly store.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from store.anomalies import AnomalyFilters, AnomalyRecord, AnomalyStore
from store.devices import Device, DeviceDirectory
from store.readings import ReadingStore

__all__ = [
    "AnomalyFilters", "AnomalyRecord", "AnomalyStore",
    "Device", "DeviceDirectory",
    "ReadingStore",
]
