"""Version information for avatarcache dependencies.

This is read by :file:`setup.py` when building packages, so it must not
import anything outside of the Python standard library.
"""

from __future__ import annotations

from typing import Dict, List, Union


###########################################################################
# Python and Django compatibility
###########################################################################

#: The minimum supported version of Python 3.x.
PYTHON_3_MIN_VERSION = (3, 8)

#: A string representation of the minimum supported version of Python 3.x.
PYTHON_3_MIN_VERSION_STR = '%s.%s' % PYTHON_3_MIN_VERSION

#: A dependency version range for Python 3.x.
PYTHON_3_RANGE = '>=%s' % PYTHON_3_MIN_VERSION_STR

#: The version range required for Django.
django_version = '~=4.2.17'


###########################################################################
# Python dependencies
###########################################################################

#: All dependencies required to install avatarcache.
package_dependencies: Dict[str, str] = {
    'Django': django_version,
    'Pillow': '>=9.1',
    'requests': '>=2.28',
    'urllib3': '>=1.26',
    'typing_extensions': '>=4.12.2',

    # importlib.metadata compatibility import, used for the icon provider
    # entry point.
    'importlib-metadata': '>=6.6',

    # importlib.resources compatibility import, used to locate part assets.
    'importlib-resources': '>=5.9',
}

#: Dependencies needed to run the test suite.
test_dependencies: Dict[str, str] = {
    'kgb': '>=7.1.1',
    'pytest': '>=8.0',
    'pytest-django': '>=4.8',
}


###########################################################################
# Packaging utilities
###########################################################################

def build_dependency_list(
    deps: Dict[str, Union[str, List[Dict[str, str]]]],
    version_prefix: str = '',
) -> List[str]:
    """Build a list of dependency specifiers from a dependency map.

    Args:
        deps (dict):
            A dictionary of dependencies, such as
            :py:data:`package_dependencies`.

        version_prefix (str, optional):
            A prefix to place before each version range.

    Returns:
        list of str:
        A sorted list of dependency specifiers.
    """
    new_deps: List[str] = []

    for dep_name, dep_details in deps.items():
        if isinstance(dep_details, list):
            new_deps += [
                '%s%s%s; python_version%s'
                % (dep_name, version_prefix, entry['version'],
                   entry['python'])
                for entry in dep_details
            ]
        else:
            new_deps.append('%s%s%s' % (dep_name, version_prefix,
                                        dep_details))

    return sorted(new_deps, key=lambda s: s.lower())
