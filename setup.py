"""Install the user directory package."""

from setuptools import setup, find_packages

setup(
    name='userdir',
    version='0.1.0',
    packages=find_packages(exclude=['*tests*']),
    install_requires=[
        "flask",
        "sqlalchemy",
        "flask-sqlalchemy",
        "wtforms",
        "pyjwt",
        "python-dateutil",
        "pytz",
        "requests",
        "bcrypt",
        "python-json-logger",
        "mimesis",
    ],
    extras_require={
        'test': ['pytest', 'hypothesis'],
    },
    zip_safe=False
)
