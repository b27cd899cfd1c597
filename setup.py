"""
Setup script for the Cangjie Database Builder.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / 'src' / 'README.md'
long_description = readme_file.read_text(encoding='utf-8') if readme_file.exists() else ''

setup(
    name='cangjie-db-builder',
    version='1.0.0',
    description='Cangjie Database Builder - Batch loading of character tables into SQLite',
    long_description=long_description,
    long_description_content_type='text/markdown',
    python_requires='>=3.8',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=[
        'SQLAlchemy>=2.0.0,<3.0.0',
        'PyYAML>=6.0.0,<7.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'cangjie-db-builder=cangjie_db_builder.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
)
