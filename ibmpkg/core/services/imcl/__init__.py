"""
IBM Installation Manager service — package re-exports.

    detection  → registry, response_file, locations
    domain     → matcher, versions
    execution  → processes, installer
"""

from ibmpkg.core.services.imcl.locations import (  # noqa: F401
    check_executable,
    find_installed_xml,
    find_user_home,
    imcl_from_installed_xml,
    user_data_dir,
)
from ibmpkg.core.services.imcl.matcher import (  # noqa: F401
    compare_package,
    find_current_state,
    find_match,
    match_resources,
    resolve_spec,
)
from ibmpkg.core.services.imcl.processes import (  # noqa: F401
    OsFamily,
    detect_os_family,
    find_pids,
    stop_processes,
)
from ibmpkg.core.services.imcl.registry import (  # noqa: F401
    parse_repo_info,
    read_registry,
    registry_path,
)
from ibmpkg.core.services.imcl.response_file import read_response_file  # noqa: F401
from ibmpkg.core.services.imcl.versions import versioncmp  # noqa: F401
