import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='busroster',
    version='1.0.0',
    license='MIT',
    description='A roster and payment ledger for chartered bus trips.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires='>=3.8',
    install_requires=[
        'aiohttp>=3.8',
        'aiohttp-cors',
        'aiohttp-apispec>=2.2.3',
        'marshmallow>=3.18,<4',
        'marshmallow-jsonschema',
        'tortoise-orm>=0.19',
        'uvloop',
        'sentry-sdk',
        'python-jose',
        'pynacl',
        'dateparser',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-aiohttp',
            'pytest-asyncio',
            'faker',
        ],
    },
    entry_points={
        'console_scripts': ['busroster=busroster.cli:run'],
    },
)
