"""Davis WeatherLink v2 station data source.

Ground-truth station data; first in the provider chain when credentials
are configured.

Public API:
  - historic: fetch_historic, parse_historic, DavisProvider
  - client: request signing and timestamp helpers
"""

from fieldheat.datasources.davis.client import HISTORIC_API, sign_params
from fieldheat.datasources.davis.historic import DavisProvider, fetch_historic, parse_historic

__all__ = [
    "HISTORIC_API",
    "DavisProvider",
    "fetch_historic",
    "parse_historic",
    "sign_params",
]
