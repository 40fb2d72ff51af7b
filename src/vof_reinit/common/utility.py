import numpy as np
from matplotlib.collections import PolyCollection
from matplotlib.patches import Patch

# Face colours by number of cell vertices
TOPOLOGY_COLORS = {
    3: ("#87CEEB", "Triangle"),
    4: ("#90EE90", "Quadrilateral"),
}
DEFAULT_COLOR = ("#D3D3D3", "Other")


def polygon_area(points):
    """Area of a planar polygon (shoelace formula)."""
    x, y = points[:, 0], points[:, 1]
    return 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def get_geometry_extent(nodes):
    """Diagonal of the bounding box of `nodes`, or 1 for a single point."""
    extent = float(np.linalg.norm(np.ptp(nodes, axis=0)))
    return extent if extent > 0.0 else 1.0


def plot_mesh(ax, nodes, cells, show_cells=False, cell_values=None, title="Mesh"):
    """
    Draws the cells of a 2D mesh on `ax`.

    Args:
        ax: Matplotlib axes.
        nodes (np.ndarray): Vertex coordinates, shape (n_nodes, 2 or 3).
        cells (list): Vertex indices of each cell.
        show_cells (bool): Whether to write the cell index in each cell.
        cell_values (np.ndarray, optional): One value per cell in [0, 1],
            e.g. a VOF field. Cells are then shaded with the "Blues" colormap
            instead of being coloured by shape.
        title (str): Axes title.

    Returns:
        PolyCollection: The drawn cells.
    """
    xy = np.asarray(nodes)[:, :2]
    polygons = [xy[cell] for cell in cells]

    collection = PolyCollection(polygons, edgecolors="k", linewidths=0.5, alpha=0.8)
    if cell_values is not None:
        collection.set_array(np.clip(np.asarray(cell_values, dtype=float), 0.0, 1.0))
        collection.set_cmap("Blues")
        collection.set_clim(0.0, 1.0)
    else:
        collection.set_facecolor(
            [TOPOLOGY_COLORS.get(len(cell), DEFAULT_COLOR)[0] for cell in cells]
        )
    ax.add_collection(collection)

    if show_cells:
        extent = get_geometry_extent(xy)
        for i, points in enumerate(polygons):
            # Label size follows the cell size relative to the whole mesh
            size = np.sqrt(polygon_area(points)) / extent
            center = points.mean(axis=0)
            ax.text(
                center[0],
                center[1],
                str(i),
                ha="center",
                va="center",
                fontsize=min(max(2, int(size * 120)), 10),
            )

    ax.set_title(title, fontsize=18, pad=20)
    ax.set_xlabel("X", fontsize=14, labelpad=8)
    ax.set_ylabel("Y", fontsize=14, labelpad=8)
    ax.set_aspect("equal", adjustable="box")
    ax.autoscale_view()
    for spine in ax.spines.values():
        spine.set_visible(False)

    if cell_values is None:
        counts = {}
        for cell in cells:
            counts[len(cell)] = counts.get(len(cell), 0) + 1
        handles = [
            Patch(
                color=TOPOLOGY_COLORS.get(n, DEFAULT_COLOR)[0],
                label=f"{TOPOLOGY_COLORS.get(n, DEFAULT_COLOR)[1]} (#{count})",
            )
            for n, count in sorted(counts.items())
        ]
        ax.legend(
            handles=handles,
            loc="upper left",
            bbox_to_anchor=(1.0, 1.0),
            fontsize=14,
            frameon=False,
        )
    return collection
