from setuptools import setup, find_packages

setup(
    name='notecomp',
    version='0.1.0',
    py_modules=['notecomp', 'engine'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'notecomp = notecomp:main',
        ],
    },
)
