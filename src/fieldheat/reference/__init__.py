"""Static agronomic constants.

Reference data that doesn't change with API calls: crop presets and their
base temperatures.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from fieldheat.reference.crops import CROP_PRESETS as CROP_PRESETS
from fieldheat.reference.crops import CropPreset as CropPreset
from fieldheat.reference.crops import get_crop as get_crop
