"""Map viewer composing configured overlay layers onto a Leaflet base map.

A JSON list of layer entries (zipped shapefiles, GeoTIFF rasters, static
images, XYZ tile grids and WMS services) is loaded entry by entry, in
order, into a folium map with a legend, a layer-toggle control and a view
framed on the combined extent of the visible layers.

- ``core``: settings, layer entry models, bounds and load errors
- ``services``: kind resolution, asset fetching, one loader per kind, the
  dispatcher, the registry batch driver and the folium viewer
- ``api``: FastAPI routers serving the map page and the layer registry
- ``cli``: renders the map page to an HTML file
"""
