"""
Spatial vector analysis with geopandas
======================================

This tutorial walks through a typical vector workflow:

* reading region polygons from a shapefile
* turning a CSV of population records into points
* reprojecting both layers to an equal-area CRS
* joining points to the regions they fall within
* summarizing population per region and computing density
* drawing static and interactive maps

The example data are Alaska regions (``ak_regions_simp.shp``), city
populations (``alaska_population.csv``) and rivers (``ak_rivers_simp.shp``),
placed in ``SPATIAL_DATA_DIR`` (default ``data/``).
"""
# %%
from pathlib import Path

from geotutor.models import AggregationSpec, SpatialJoinConfig, SpatialSettings
from geotutor.rendering import (
    MapLayer,
    choropleth,
    render_interactive_map,
    render_static_map,
    save_figure,
    save_interactive_map,
)
from geotutor.spatial_utils import (
    CRSMismatchError,
    add_area,
    add_density,
    attach_summary,
    crs_label,
    dissolve_by,
    read_points_csv,
    read_vector,
    reproject,
    spatial_join,
    summarize_by,
    write_vector,
)

settings = SpatialSettings()
data_dir = Path(settings.data_dir)
output_dir = Path(settings.output_dir)

# %%
# Reading polygons
# ----------------
#
# A shapefile is really several files (.shp, .shx, .dbf, .prj) sharing a
# name; ``read_vector`` takes the .shp path and reads the CRS from the .prj.

regions = read_vector(data_dir / "ak_regions_simp.shp")
print(crs_label(regions.crs))
regions.head()

# %%
# The regions come in geographic coordinates (WGS 84). Alaska crosses the
# antimeridian, so a plot in degrees is stretched across the whole globe:

regions.plot()

# %%
# Reprojecting
# ------------
#
# Alaska Albers (EPSG:3338) is an equal-area projection: areas measured in
# it are meaningful, and the state is drawn compactly.

regions_3338 = reproject(regions, settings.analysis_crs)
regions_3338.plot()

# %%
# Points from a table
# -------------------
#
# The population CSV has ``lat``/``lng`` columns in WGS 84. Rows without
# coordinates are dropped with a warning.

pop = read_points_csv(data_dir / "alaska_population.csv", lon_column="lng", lat_column="lat")
pop.head()

# %%
# Joining layers in different CRSs is an error: the coordinates of one are
# meaningless in the other.

try:
    spatial_join(pop, regions_3338)
except CRSMismatchError as e:
    print(e)

# %%
# Once the points are reprojected too, each point picks up the attributes of
# the region it falls within:

pop_3338 = reproject(pop, settings.analysis_crs)
pop_joined = spatial_join(pop_3338, regions_3338, SpatialJoinConfig(predicate="within"))
pop_joined.head()

# %%
# Aggregating
# -----------
#
# Summing population by region gives a plain table; attaching it back to the
# polygons gives something we can map.

spec = AggregationSpec(group_by="region", value_column="population", agg="sum")
pop_region = summarize_by(pop_joined, spec)
pop_region

# %%

regions_pop = attach_summary(regions_3338, pop_region, key="region")
regions_pop = add_area(regions_pop)
regions_pop = add_density(regions_pop, value_column=spec.output_column)
regions_pop[["region", spec.output_column, "area_km2", "density"]]

# %%
# Regions belong to management areas; dissolving merges their polygons and
# sums the population.

pop_mgmt = dissolve_by(regions_pop, "mgmt_area", value_columns=[spec.output_column])
pop_mgmt.plot(column=spec.output_column, legend=True)

# %%
# Writing results
# ---------------

write_vector(regions_pop, output_dir / "regional_population.gpkg")

# %%
# Static maps
# -----------
#
# A choropleth shades each polygon by one attribute:

fig = choropleth(regions_pop, spec.output_column, title="Total population", legend_label="people")
save_figure(fig, output_dir / "total_population.png")

# %%
# Maps with several layers are drawn bottom-up. Here rivers are drawn with a
# line width proportional to their stream order, and the cities on top.

rivers = read_vector(data_dir / "ak_rivers_simp.shp")
fig = render_static_map(
    [
        MapLayer(regions_pop, column=spec.output_column, cmap="viridis", legend=True, edgecolor="white"),
        MapLayer(rivers, color="steelblue", linewidth=1.5, linewidth_column="StrOrder", label="Rivers"),
        MapLayer(pop_3338, color="black", markersize=1, label="Cities"),
    ],
    title="Population and rivers",
)
save_figure(fig, output_dir / "population_rivers.png")

# %%
# Interactive maps
# ----------------
#
# Leaflet maps need WGS 84 coordinates; ``render_interactive_map`` reprojects
# for us. Hover a region for its numbers, click a city for its name.

fmap = render_interactive_map(
    regions_pop,
    column="density",
    tooltip_fields=["region", spec.output_column, "density"],
    points=pop,
    point_popup_field="city",
)
save_interactive_map(fmap, output_dir / "population_density.html")
fmap
