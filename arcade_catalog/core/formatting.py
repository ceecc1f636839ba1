KB = 1024
MB = 1024 * KB
GB = 1024 * MB


def format_size(size: int) -> str:
    """512 -> '512 B', 2048 -> '2.0 KB', 5242880 -> '5.0 MB'"""
    if size < KB:
        return f"{size} B"
    if size < MB:
        return f"{size / KB:.1f} KB"
    if size < GB:
        return f"{size / MB:.1f} MB"
    return f"{size / GB:.1f} GB"
