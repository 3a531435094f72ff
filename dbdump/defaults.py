# dbdump/defaults.py
"""Default settings - no imports to avoid circular dependencies."""

settings = {
    'database': 'appliance_stats.sqlite',
    'output_dir': 'sqlite_dump',
    'log_level': 'INFO',
    'max_workers': None,            # None = one worker thread per table
    'file_extension': 'csv',
    'line_terminator': '\n',
    'null_string': 'null',          # how null is represented in dump files
    'timestamp_columns': ['sm_timestamp', 'timestamp'],
    'timestamp_parsed_column': 'timestamp_parsed',
    'logging': {
        'directory': None,          # None = console only
        'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        'timestamp_format': '%Y-%m-%d %H:%M:%S',
        'filename_format': '%Y%m%d_%H%M%S',  # Set to '' for single log file (no timestamp)
        'console': True,
    }
}
