# ABOUTME: Bookbench - bulk ingest and read-load harness for a MongoDB book collection.
# ABOUTME: Package root; see bookbench.cli for the command-line entry point.
