from .downloader import DownloadedPackage, download, format_size, resolve_output_path

__all__ = ["DownloadedPackage", "download", "format_size", "resolve_output_path"]
