# =============================================================================
# Unit Tests: Static and Interactive Rendering
# =============================================================================

import folium
import geopandas as gpd
import matplotlib.pyplot as plt
import pytest
from branca.colormap import LinearColormap
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Patch
from shapely.geometry import LineString

from geotutor.rendering import (
    MapLayer,
    build_colormap,
    choropleth,
    render_interactive_map,
    render_static_map,
    save_figure,
    save_interactive_map,
)


@pytest.fixture
def rivers_3338():
    return gpd.GeoDataFrame(
        {"name": ["small", "medium", "large"], "StrOrder": [1, 2, 4]},
        geometry=[
            LineString([(0, 0), (5_000, 5_000)]),
            LineString([(5_000, 5_000), (10_000, 5_000)]),
            LineString([(10_000, 5_000), (20_000, 8_000)]),
        ],
        crs="EPSG:3338",
    )


@pytest.fixture
def summary_3338(regions_3338):
    return regions_3338.assign(total_population=[150, 30], density=[1.5, 0.3])


# =============================================================================
# Test: MapLayer
# =============================================================================

def test_map_layer_linewidth_scaled_by_column(rivers_3338):
    """Test that line widths are proportional to the attribute, max = linewidth."""
    layer = MapLayer(rivers_3338, linewidth_column="StrOrder", linewidth=2.0, color="blue")
    kwargs = layer.plot_kwargs()

    assert kwargs["linewidth"] == pytest.approx([0.5, 1.0, 2.0])
    assert kwargs["color"] == "blue"


def test_map_layer_column_kwargs(summary_3338):
    layer = MapLayer(summary_3338, column="density", cmap="YlOrRd", legend=True, legend_kwds={"label": "x"})
    kwargs = layer.plot_kwargs()

    assert kwargs["column"] == "density"
    assert kwargs["cmap"] == "YlOrRd"
    assert kwargs["legend"] is True
    assert kwargs["legend_kwds"] == {"label": "x"}
    assert "color" not in kwargs


def test_map_layer_missing_column(summary_3338):
    with pytest.raises(KeyError):
        MapLayer(summary_3338, column="nope").plot_kwargs()
    with pytest.raises(KeyError):
        MapLayer(summary_3338, linewidth_column="nope").plot_kwargs()


def test_map_layer_legend_handles(rivers_3338, points_3338, regions_3338):
    assert MapLayer(regions_3338).legend_handle() is None
    assert isinstance(MapLayer(rivers_3338, label="Rivers").legend_handle(), Line2D)
    assert isinstance(MapLayer(points_3338, label="Cities").legend_handle(), Line2D)
    assert isinstance(MapLayer(regions_3338, label="Regions").legend_handle(), Patch)


# =============================================================================
# Test: Static maps
# =============================================================================

def test_render_static_map_layers(summary_3338, rivers_3338, points_3338):
    fig = render_static_map(
        [
            MapLayer(summary_3338, column="total_population"),
            MapLayer(rivers_3338, color="steelblue", linewidth_column="StrOrder", label="Rivers"),
            MapLayer(points_3338, color="black", markersize=2, label="Cities"),
        ],
        title="Population",
    )

    assert isinstance(fig, Figure)
    ax = fig.axes[0]
    assert ax.get_title() == "Population"
    assert [t.get_text() for t in ax.get_legend().get_texts()] == ["Rivers", "Cities"]
    plt.close(fig)


def test_render_static_map_aligns_crs(summary_3338, points_3338):
    """Test that layers are reprojected to the first layer's CRS."""
    fig = render_static_map(
        [MapLayer(summary_3338.to_crs("EPSG:4326")), MapLayer(points_3338, color="black")],
        axis_off=False,
    )
    xmin, xmax = fig.axes[0].get_xlim()
    assert -180 <= xmin <= xmax <= 180
    plt.close(fig)


def test_render_static_map_requires_layers():
    with pytest.raises(ValueError, match="At least one layer"):
        render_static_map([])


def test_render_static_map_layer_without_crs(summary_3338):
    no_crs = gpd.GeoDataFrame(geometry=list(summary_3338.geometry))
    with pytest.raises(ValueError, match="CRS"):
        render_static_map([MapLayer(summary_3338), MapLayer(no_crs)])


def test_render_static_map_first_layer_without_crs(summary_3338):
    """Test that a CRS-less first layer is not silently mixed with a projected one."""
    no_crs = gpd.GeoDataFrame(geometry=list(summary_3338.geometry))
    open_figures = plt.get_fignums()
    with pytest.raises(ValueError, match="CRS"):
        render_static_map([MapLayer(no_crs), MapLayer(summary_3338)])
    assert plt.get_fignums() == open_figures


def test_render_static_map_without_any_crs(summary_3338):
    no_crs = gpd.GeoDataFrame(geometry=list(summary_3338.geometry))
    fig = render_static_map([MapLayer(no_crs), MapLayer(no_crs.copy())])
    assert isinstance(fig, Figure)
    plt.close(fig)


def test_choropleth_has_colorbar(summary_3338):
    fig = choropleth(summary_3338, "density", title="Density", legend_label="people per km²")
    assert len(fig.axes) == 2
    plt.close(fig)


def test_save_figure(tmp_path, summary_3338):
    fig = choropleth(summary_3338, "density")
    path = save_figure(fig, tmp_path / "maps" / "density.png")

    assert path.exists()
    assert path.stat().st_size > 0
    assert not plt.fignum_exists(fig.number)


def test_save_figure_rejects_html(tmp_path, summary_3338):
    fig = choropleth(summary_3338, "density")
    with pytest.raises(ValueError, match="HTML"):
        save_figure(fig, tmp_path / "density.html")
    plt.close(fig)


# =============================================================================
# Test: Interactive maps
# =============================================================================

def test_build_colormap_range():
    colormap = build_colormap([1.0, float("nan"), 5.0], caption="density")
    assert isinstance(colormap, LinearColormap)
    assert colormap.vmin == 1.0
    assert colormap.vmax == 5.0
    assert colormap.caption == "density"


def test_build_colormap_constant_values():
    colormap = build_colormap([3.0, 3.0])
    assert colormap.vmin == 3.0
    assert colormap.vmax == 4.0


def test_render_interactive_map(tmp_path, summary_3338, points_3338):
    fmap = render_interactive_map(
        summary_3338,
        column="density",
        tooltip_fields=["region", "total_population"],
        points=points_3338,
        point_popup_field="city",
    )
    assert isinstance(fmap, folium.Map)

    path = save_interactive_map(fmap, tmp_path / "web" / "map.html")
    html = path.read_text()
    assert "leaflet" in html.lower()
    assert "North" in html
    assert "Charlie" in html


def test_render_interactive_map_centered_in_wgs84(summary_3338):
    fmap = render_interactive_map(summary_3338, zoom_start=6)
    lat, lon = fmap.location
    assert 40 < lat < 70
    assert -170 < lon < -140


def test_render_interactive_map_missing_field(summary_3338):
    with pytest.raises(KeyError):
        render_interactive_map(summary_3338, tooltip_fields=["nope"])


def test_render_interactive_map_requires_crs(summary_3338):
    no_crs = gpd.GeoDataFrame(summary_3338.drop(columns="geometry"), geometry=list(summary_3338.geometry))
    with pytest.raises(ValueError, match="CRS"):
        render_interactive_map(no_crs)


def test_render_interactive_map_empty_layer(summary_3338):
    with pytest.raises(ValueError, match="empty"):
        render_interactive_map(summary_3338.iloc[0:0])


def test_render_interactive_map_only_empty_geometries():
    blank = gpd.GeoDataFrame({"name": ["nowhere"]}, geometry=[None], crs="EPSG:3338")
    with pytest.raises(ValueError, match="finite"):
        render_interactive_map(blank)
