"""Install the account directory package."""

from setuptools import setup, find_packages

setup(
    name='accountdir',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    py_modules=['wsgi'],
    install_requires=[
        "bcrypt",
        "boto3",
        "botocore",
        "click",
        "flask",
        "pyjwt",
        "python-dateutil",
        "python-json-logger",
        "pytz",
        "redis",
    ],
    extras_require={
        'test': ["pytest"],
    },
    entry_points={
        'console_scripts': ['accountdir=accountdir.cli:main'],
    },
    zip_safe=False
)
