from pathlib import Path


class OutputPathBuilder:
    """
    Mirrors a source file's position in the input tree under the output root.
    """

    def __init__(self, input_root: Path, output_root: Path):
        self.input_root = input_root
        self.output_root = output_root

    def build(self, source: Path, ext: str) -> Path:
        """
        Returns the destination for source with its extension replaced by ext,
        creating the destination directory. Existence of the file itself is
        left to the caller, right before it writes.
        """
        rel_dir = source.parent.relative_to(self.input_root)
        dest_dir = self.output_root / rel_dir
        dest_dir.mkdir(parents=True, exist_ok=True)
        return dest_dir / f"{source.stem}{ext}"
