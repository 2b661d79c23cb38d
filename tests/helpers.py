def snapshot(root):
    """Map every file under root to its contents, for before/after diffs."""
    return {
        str(p.relative_to(root)): p.read_text(errors="replace")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }
