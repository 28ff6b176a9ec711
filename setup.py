from setuptools import setup

setup(
    name='uiccsim',
    version='1.0',
    packages=[
        'uiccsim',
        'uiccsim.transport',
    ],
    url='https://osmocom.org/projects/pysim/wiki',
    license='GPLv2',
    author_email='simtrace@lists.osmocom.org',
    description='Simulated UICC authentication (COMP128v1, Milenage) behind a 3GPP TS 27.007 AT command interface',
    install_requires=[
        "pyserial",
        "cmd2 >= 1.5.0, < 3.0",
        "construct >= 2.10.70",
        "pyosmocom >= 0.0.9",
        "pyyaml >= 5.1",
        "colorlog",
        "pycryptodomex",
        "packaging",
    ],
    extras_require={
        'test': ['pytest'],
    },
    scripts=[
        'uicc-sim.py',
    ],
    zip_safe=False,
    python_requires=">=3.7",
)
