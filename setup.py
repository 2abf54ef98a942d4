#!/usr/bin/env python3

import sys

from setuptools import find_packages, setup

from avatarcache import get_package_version
from avatarcache.dependencies import (PYTHON_3_RANGE,
                                      build_dependency_list,
                                      package_dependencies,
                                      test_dependencies)


# Make sure this is a version of Python we are compatible with. This should
# prevent people on older versions from unintentionally trying to install
# the source tarball, and failing.
if sys.hexversion < 0x03080000:
    sys.stderr.write('This version of avatarcache is incompatible with your '
                     'version of Python.\n')
    sys.exit(1)


PACKAGE_NAME = 'avatarcache'

setup(
    name=PACKAGE_NAME,
    version=get_package_version(),
    license='GPLv2+',
    description=(
        'Deterministic default avatars and a privacy-preserving avatar '
        'cache for Django-based sites.'
    ),
    packages=find_packages(exclude=['tests']),
    package_data={
        'avatarcache': [
            'icons/parts/*/*.json',
            'static/avatarcache/images/*',
        ],
    },
    python_requires=PYTHON_3_RANGE,
    install_requires=build_dependency_list(package_dependencies),
    extras_require={
        'test': build_dependency_list(test_dependencies),
    },
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Web Environment',
        'Framework :: Django',
        'Framework :: Django :: 4.2',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License v2 or later '
        '(GPLv2+)',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP :: Dynamic Content',
        'Topic :: Multimedia :: Graphics',
    ],
)
