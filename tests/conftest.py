import pytest

from equipdash.store.memory import MemoryStore


@pytest.fixture
def store():
    return MemoryStore({
        "equipment": [
            {"id": "eq-1", "name": "Router X", "model": "RX-200",
             "mac_address": "AA:BB:CC:DD:EE:FF", "location": "Rack 3"},
            {"id": "eq-2", "name": "Switch Y", "mac_address": "C8:5A:9F:C7:B9:C0"},
        ],
        "inventory_boxes": [
            {"id": "box-1", "box_number": "B-001", "equipment": "ONU", "model": "F601",
             "macs": ["00:11:22:33:44:55", "00:11:22:33:44:56"]},
        ],
        "defect_reports": [
            {"id": "def-1", "equipment": "ONU", "model": "F601", "registered_on": "2024-03-01",
             "macs": ["DE:AD:BE:EF:00:01", "DE:AD:BE:EF:00:02"], "quantity": 2},
        ],
        "recovery_reports": [
            {"id": "rec-1", "equipment": "ONU", "problem": "no power", "solution": "new PSU",
             "responsible": "Ana", "macs": ["11:22:33:44:55:66"]},
        ],
        "rma_records": [
            {"id": "rma-1", "rma_number": "RMA-2024-001", "equipment": "Router",
             "mac_address": "0A:0B:0C:0D:0E:0F | 0A:0B:0C:0D:0E:10",
             "created_at": "2024-05-01T10:00:00+00:00"},
        ],
    })
