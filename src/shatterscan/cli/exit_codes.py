"""Standard exit codes for the ShatterScan CLI.

Following shell conventions:
- 0: Success
- 1: Analysis, input or configuration error
- 2: Command line usage error
- 130: Terminated by SIGINT (128 + 2)
"""

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_SIGINT = 130  # 128 + SIGINT(2)
