from setuptools import find_packages, setup

setup(
    name='zcb-scenario-player',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        '': [
            '*.yaml',
            '*.yml',
        ],
    },
    python_requires='>=3.8',

    entry_points={
        'console_scripts': [
            'zcb-player=zcb_player.__main__:main',
        ],
    },
    install_requires=[
        'web3>=7.0',
        'eth-abi>=5.0',
        'eth-account>=0.13',
        'eth-typing>=4.0',
        'eth-utils>=4.0',
        'hexbytes>=1.0',
        'click>=8.0',
        'jinja2',
        'pyyaml',
        'structlog',
    ],
    extras_require={
        'tester': [
            'eth-tester[py-evm]>=0.12.0b1',
        ],
        'test': [
            'pytest',
            'eth-tester[py-evm]>=0.12.0b1',
        ],
    },
)
