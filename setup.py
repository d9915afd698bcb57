#!/usr/bin/env python
from setuptools import setup
import os


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, 'src', 'fontsplit', 'version.py')
    with open(filename, 'rb') as fp:
        return fp.read().decode('utf8').split('=')[1].strip(" \n'")


def readme():
    with open('README.rst') as f:
        return f.read()


setup(
    name='fontsplit',
    version=get_version(),
    description='Split font collections and check font weight metadata',
    long_description=readme(),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Text Processing :: Fonts',
    ],
    keywords='font ttc otc opentype truetype flutter',
    license='MIT License',
    package_dir={'': 'src'},
    packages=['fontsplit'],
    python_requires='>=3.10',
    install_requires=[
        'fonttools[woff]>=4.40',
        'pillow',
        'numpy',
        'svgwrite',
        'pyyaml',
        'typing_extensions; python_version < "3.11"',
    ],
    extras_require={
        'test': ['pytest'],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': ['fontsplit=fontsplit.__main__:main']
    },
    tests_require=['pytest'],
    )
