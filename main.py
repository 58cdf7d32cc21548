"""
Progressive Mesh Simplification - Main Demo
===========================================

Demonstrates edge-collapse simplification.

This script:
1. Loads a mesh or creates a sample one
2. Simplifies it at several removal percentages
3. Prints quality reports
4. Saves comparison plots and simplified meshes
"""

import argparse
import time
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from progmesh.evaluation import MeshEvaluator
from progmesh.mesh import IndexedMesh
from progmesh.simplifier import MeshSimplifier
from progmesh.utils import create_sample_mesh, load_mesh, print_mesh_info, save_mesh
from progmesh.visualization import MeshVisualizer


def run_single_simplification(mesh: IndexedMesh,
                              percentage: float,
                              preserve_texture: bool = False,
                              min_vertices: int = 50,
                              verbose: bool = True) -> tuple:
    """
    Run a single simplification and return the result with its runtime.
    """
    simplifier = MeshSimplifier(min_vertices=min_vertices, verbose=verbose)

    start_time = time.time()
    simplified = simplifier.simplify(mesh, percentage, preserve_texture=preserve_texture)
    runtime = time.time() - start_time

    return simplified, runtime


def demo_percentage_sweep(mesh: IndexedMesh,
                          output_dir: Path,
                          mesh_name: str,
                          percentages: list,
                          preserve_texture: bool,
                          min_vertices: int):
    """
    Simplify at several removal percentages and report on each.
    """
    print("\n" + "=" * 60)
    print("PERCENTAGE SWEEP")
    print("=" * 60)

    visualizer = MeshVisualizer()
    evaluator = MeshEvaluator()

    results = []
    for percentage in percentages:
        print(f"\n--- Removing {percentage*100:.0f}% of vertices ---")

        simplified, runtime = run_single_simplification(
            mesh, percentage, preserve_texture=preserve_texture, min_vertices=min_vertices
        )
        metrics = evaluator.compute_all_metrics(mesh, simplified)
        metrics['runtime'] = runtime
        results.append((percentage, simplified, metrics))

        print(f"  Vertices: {mesh.vertex_count} -> {simplified.vertex_count}")
        print(f"  Faces: {mesh.face_count} -> {simplified.face_count}")
        print(f"  Hausdorff: {metrics['hausdorff_distance']:.6f}")
        print(f"  Runtime: {runtime:.3f}s")

    print("\nGenerating visualizations...")

    meshes = [mesh] + [r[1] for r in results]
    labels = ["Original"] + [f"-{p*100:.0f}% ({m.vertex_count} vertices)" for p, m, _ in results]
    fig = visualizer.plot_multi_resolution(
        meshes, labels,
        title=f"{mesh_name} - Simplification Sweep",
        save_path=str(output_dir / f"{mesh_name}_sweep.png")
    )
    plt.close(fig)

    percentage, simplified, metrics = results[-1]
    fig = visualizer.plot_mesh_comparison(
        mesh, simplified,
        title=f"{mesh_name} - Original vs -{percentage*100:.0f}%",
        save_path=str(output_dir / f"{mesh_name}_comparison.png")
    )
    plt.close(fig)

    if preserve_texture and mesh.has_uvs and simplified.has_uvs:
        fig = visualizer.plot_uv_layout(
            mesh, simplified,
            title=f"{mesh_name} - UV Layout",
            save_path=str(output_dir / f"{mesh_name}_uv_layout.png")
        )
        plt.close(fig)

    print("\n" + evaluator.generate_report(metrics, f"-{percentage*100:.0f}% vertices"))

    for percentage, simplified, _ in results:
        save_mesh(simplified, output_dir / f"{mesh_name}_simplified_{int(percentage*100)}pct.ply")

    return results


def main():
    """Main demo entry point."""
    parser = argparse.ArgumentParser(
        description="Progressive mesh simplification demo"
    )
    parser.add_argument(
        "--mesh", "-m", type=str, default=None,
        help="Path to input mesh file. If not provided, uses a sample mesh."
    )
    parser.add_argument(
        "--sample", "-s", type=str, default="sphere",
        choices=["sphere", "torus", "cylinder", "grid"],
        help="Sample mesh to create when no mesh file is given"
    )
    parser.add_argument(
        "--output", "-o", type=str, default="output",
        help="Output directory for results"
    )
    parser.add_argument(
        "--percentage", "-p", type=float, nargs="+", default=[0.25, 0.5, 0.75],
        help="Fractions of vertices to remove (default: 0.25 0.5 0.75)"
    )
    parser.add_argument(
        "--preserve-texture", "-t", action="store_true",
        help="Correct UV coordinates around collapsed vertices"
    )
    parser.add_argument(
        "--min-vertices", type=int, default=50,
        help="Meshes with fewer vertices are left unchanged (default: 50)"
    )

    args = parser.parse_args()

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("PROGRESSIVE MESH SIMPLIFICATION")
    print("=" * 60)

    if args.mesh:
        print(f"\nLoading mesh from: {args.mesh}")
        mesh = load_mesh(args.mesh)
        mesh_name = Path(args.mesh).stem
    else:
        print("\nNo mesh specified, creating sample mesh...")
        mesh = create_sample_mesh(args.sample)
        mesh_name = f"sample_{args.sample}"

    print_mesh_info(mesh, mesh_name)

    demo_percentage_sweep(mesh, output_dir, mesh_name,
                          percentages=args.percentage,
                          preserve_texture=args.preserve_texture,
                          min_vertices=args.min_vertices)

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print(f"Results saved to: {output_dir.absolute()}")
    print("=" * 60)


if __name__ == "__main__":
    main()
