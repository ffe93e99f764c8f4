from .io import export_comparison_results, load_comparison_data

__all__ = ["load_comparison_data", "export_comparison_results"]
