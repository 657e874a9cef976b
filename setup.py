from setuptools import setup, find_packages

setup(
    name='notecalc',
    version='1.0.0',
    description='Notepad calculator with incremental line evaluation',
    packages=find_packages(include=['notecalc', 'notecalc.*']),
    python_requires='>=3.8',
    install_requires=['fastapi', 'pydantic', 'uvicorn'],
    extras_require={
        'test': ['pytest', 'httpx'],
    },
)
