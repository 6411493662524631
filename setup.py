#!/usr/bin/env python3

import os
from setuptools import setup, find_namespace_packages


here = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(here, 'README.md')) as f:
    README = f.read()


if __name__ == "__main__":
    setup(
        name = 'soter-pipeline-scan',
        setup_requires = ['setuptools_scm'],
        use_scm_version = dict(fallback_version = '0.1.0'),
        description = 'Tool for scanning container images with Anchore Engine from a build pipeline.',
        long_description = README,
        long_description_content_type = 'text/markdown',
        classifiers = [
            "Programming Language :: Python",
        ],
        author = 'Matt Pryor',
        author_email = 'matt.pryor@stfc.ac.uk',
        url = 'https://github.com/mkjpryor/soter-pipeline-scan',
        keywords = 'container image scan security vulnerability policy anchore pipeline',
        packages = find_namespace_packages(include = ['soter.*']),
        include_package_data = True,
        zip_safe = False,
        python_requires = '>=3.8',
        install_requires = [
            'django-flexi-settings',
            'httpx',
            'pydantic>=2',
            'python-dateutil',
            'pyyaml',
            'click',
        ],
        extras_require = {
            'test': ['pytest'],
        },
        entry_points = {
            'console_scripts': [
                'soter-pipeline-scan = soter.pipeline.cli:main',
            ]
        }
    )
