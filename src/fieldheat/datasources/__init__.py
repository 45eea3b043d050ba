"""Weather provider integrations.

Each subdirectory is one provider with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, small pure helpers
    └── {feature}.py      # Fetch + parse functions and the provider class

Adding a provider
-----------------
1. Create ``datasources/{name}/`` with the files above.
   ``openmeteo/`` is the minimal example, ``davis/`` shows signed requests.

2. Write a fetch function returning the raw payload and a parse function
   returning ``list[DailyWeatherRecord]`` (unreported values stay ``None``)::

       from fieldheat.services.http import provider_session

       def fetch_something(lat, lon, start, end) -> dict[str, Any]:
           resp = provider_session.get(API_URL, params={...})
           resp.raise_for_status()
           return resp.json()

3. Wrap both in a class satisfying ``providers.WeatherProvider``
   (``name``, ``requires_key``, ``is_configured``, ``fetch``).

4. Insert it at the right position in ``providers.build_provider_chain()``
   and give its source tag a rank in ``schemas.SOURCE_PRIORITY``.

5. Add tests in ``tests/test_{name}.py``.
"""
