#!/usr/bin/env python

import setuptools

name = 'ircstate'
description = 'IRC (Internet Relay Chat) session state tracking for Python'

params = dict(
    name=name,
    version='1.0.0',
    description=description or name,
    packages=setuptools.find_packages(),
    package_data={name: ['codes.txt']},
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=[
        'jaraco.collections',
        'jaraco.text',
        'jaraco.logging',
        'more_itertools',
    ],
    extras_require={
        'testing': [
            # upstream
            'pytest>=3.5,!=3.7.3',
            'pytest-sugar>=0.9.1',
        ],
        'docs': [
            # upstream
            'sphinx',
            'jaraco.packaging>=3.2',
            'furo',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
    entry_points={
    },
)
if __name__ == '__main__':
    setuptools.setup(**params)
