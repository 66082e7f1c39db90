from setuptools import setup, find_packages

setup(
    name             = 'droidscope',
    version          = '1.0.0',
    description      = 'droidscope — Android SMS, call log & contact extraction and analysis over adb',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': [
            'pytest>=7.0',
            'httpx>=0.24',
        ],
    },
    entry_points     = {
        'console_scripts': [
            'droidscope = droidscope.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
)
