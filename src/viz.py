import os
from typing import Dict, List, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import matplotlib.colors as mcolors


NODE_STYLE = {
    "doorway": ("D", "#d62728", "Doorways"),
    "waypoint": ("o", "#7f7f7f", "Waypoints"),
    "beacon": ("s", "#1f77b4", "Beacons"),
}


def _ensure_dir(p: str):
    d = os.path.dirname(p)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def _fmt_hms(seconds: float) -> str:
    s = int(round(seconds))
    h = s // 3600
    m = (s % 3600) // 60
    sec = s % 60
    return f"{h:02d}:{m:02d}:{sec:02d}"


def _style_for(tag: str):
    if tag.startswith("beacon"):
        return NODE_STYLE["beacon"]
    return NODE_STYLE.get(tag, NODE_STYLE["waypoint"])


def plot_route(
    nodes: Dict[str, dict],
    edges: List[Tuple[str, str]],
    result: dict,
    savepath: str = "out/route.png",
):
    """Top-down (X/Z) plot of the map graph with the route drawn over it.

    ``nodes`` maps node id to ``{"x", "z", "type", "room", "name"}``.
    """
    _ensure_dir(savepath)
    import numpy as np

    fig, ax = plt.subplots(figsize=(8.5, 6.0))

    # Graph edges underneath everything
    for (u, v) in edges:
        if u not in nodes or v not in nodes:
            continue
        ax.plot(
            [nodes[u]["x"], nodes[v]["x"]],
            [nodes[u]["z"], nodes[v]["z"]],
            color="#cccccc",
            lw=0.6,
            zorder=1,
        )

    # Room labels at the centroid of their members
    rooms: Dict[str, List[Tuple[float, float]]] = {}
    for info in nodes.values():
        rooms.setdefault(info["room"], []).append((info["x"], info["z"]))
    for room, pts in rooms.items():
        arr = np.array(pts)
        cx, cz = arr.mean(axis=0)
        ax.text(
            cx,
            cz,
            room,
            fontsize=11,
            color="#999999",
            ha="center",
            va="center",
            alpha=0.6,
            zorder=0,
        )

    # Nodes by type
    for marker, color, label in NODE_STYLE.values():
        members = [info for info in nodes.values() if _style_for(info["type"])[2] == label]
        if not members:
            continue
        xs = np.array([m["x"] for m in members])
        zs = np.array([m["z"] for m in members])
        ax.scatter(xs, zs, marker=marker, s=60, c=color, edgecolors="#333333", linewidths=0.6, label=label, zorder=3)
        for m in members:
            ax.text(m["x"] + 0.15, m["z"] + 0.15, m["name"], fontsize=7, color="#111", zorder=4)

    # Route polyline
    route = result.get("route", {})
    steps = route.get("path", [])
    if steps:
        rx = np.array([s["position"]["x"] for s in steps])
        rz = np.array([s["position"]["z"] for s in steps])
        ax.plot(rx, rz, color="#ff7f0e", lw=2.5, zorder=5, label="Route")
        ax.scatter(rx[:1], rz[:1], marker="*", s=220, c="#2ca02c", edgecolors="#333", zorder=6, label="Start")
        ax.scatter(rx[-1:], rz[-1:], marker="X", s=160, c="#9467bd", edgecolors="#333", zorder=6, label="Destination")
        for s in steps:
            ax.text(
                s["position"]["x"] - 0.3,
                s["position"]["z"] - 0.35,
                str(s["step"]),
                fontsize=8,
                color="#ff7f0e",
                bbox=dict(boxstyle="round,pad=0.1", facecolor="white", alpha=0.7, edgecolor="none"),
                zorder=7,
            )

        total = route.get("totalDistance", 0.0)
        eta = result.get("T_total")
        text = f"{route.get('startNode')} -> {route.get('endNode')}\nDistance: {total:.2f} m"
        if eta is not None:
            text += f"\nETA: {_fmt_hms(eta)}"
        ax.text(
            0.01,
            0.01,
            text,
            transform=ax.transAxes,
            fontsize=8,
            color="#111",
            verticalalignment="bottom",
            horizontalalignment="left",
            bbox=dict(boxstyle="round", facecolor="white", alpha=0.85, edgecolor="#666"),
        )

    ax.set_xlabel("X (m)")
    ax.set_ylabel("Z (m)")
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, linestyle=":", alpha=0.4)
    ax.legend(loc="upper right", fontsize=8)
    ax.set_title("Route")
    fig.tight_layout()
    fig.savefig(savepath, dpi=150)
    plt.close(fig)


def plot_timeline(
    result: dict,
    savepath: str = "out/timeline.png",
):
    """Bar per walking leg, labelled with the instruction issued at its start."""
    _ensure_dir(savepath)
    timeline = [entry for entry in result.get("timeline", []) if entry.get("type") == "walk"]

    fig, ax = plt.subplots(figsize=(10, 2 + 0.5 * max(len(timeline), 1)))
    base = "#1f77b4"

    def _variant(color, idx):
        rgb = mcolors.to_rgb(color)
        if idx % 2:
            rgb = tuple(min(1.0, c + 0.35 * (1 - c)) for c in rgb)
        return rgb

    yticks = []
    yticklbls = []
    y = 10
    for idx, entry in enumerate(timeline):
        t0 = float(entry.get("t0", 0.0))
        t1 = float(entry.get("t1", t0))
        ax.broken_barh([(t0, t1 - t0)], (y, 8), facecolors=_variant(base, idx), edgecolors="none", alpha=0.95)
        ax.text(t1, y + 4, f"  {entry.get('instruction', '')}", ha="left", va="center", fontsize=7, color="#111")
        yticks.append(y + 4)
        yticklbls.append(f"{entry.get('from_name')} -> {entry.get('to_name')}")
        y += 12

    ax.set_yticks(yticks)
    ax.set_yticklabels(yticklbls, fontsize=7)
    ax.invert_yaxis()
    ax.set_xlabel("Time")
    ax.set_title("Walk timeline", pad=12)

    def secfmt(x, pos=None):
        return _fmt_hms(x)

    import matplotlib.ticker as mticker

    ax.xaxis.set_major_formatter(mticker.FuncFormatter(secfmt))
    ax.grid(True, axis="x", linestyle=":", alpha=0.4)
    ax.set_xlim(0, max(float(result.get("T_total", 0.0) or 0.0), 1.0) * 1.35)
    fig.tight_layout()
    fig.savefig(savepath, dpi=150)
    plt.close(fig)
