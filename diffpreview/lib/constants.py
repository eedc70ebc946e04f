"""Shared constants for diffpreview."""

# Stable scratch directory name under the platform temp dir, so old runs can be found and swept
SCRATCH_DIR_NAME = "diff-preview"

# Per-run subdirectory name; sorts lexicographically by time
RUN_DIR_FORMAT = "%Y-%m-%d_%H_%M_%S"

DEFAULT_RETENTION_HOURS = 24

DEFAULT_REVISION = "HEAD"

# Temp dir environment variables, in lookup order
TEMP_ENV_VARS = ("TEMP", "TMP", "TMPDIR")

# Snapshot layouts
LAYOUT_FLAT = "flat"
LAYOUT_MIRROR = "mirror"
VALID_LAYOUTS = (LAYOUT_FLAT, LAYOUT_MIRROR)

# Viewer command templates. {before} and {after} are replaced by the snapshot dirs.
# WinMerge: /u no MRU entry, /wl /wr both sides read-only, /r recursive
WINMERGE_VIEWER = "WinMergeU /u /wl /wr /r {before} {after}"
# Meld has no read-only switch, so edits made in it land in the snapshot copies
MELD_VIEWER = "meld {before} {after}"

CONFIG_DIR_NAME = "diffpreview"
CONFIG_FILE_NAME = "config.yaml"
