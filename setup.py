from setuptools import setup

setup(
    name='touchlatency',
    packages=[
        'touchlatency',
        'touchlatency.common',
        'touchlatency.device',
        'touchlatency.estimator',
    ],
    version='0.1.0',
    license='apache-2.0',
    description='Touch-to-display latency estimation model for Android devices',
    keywords=['latency', 'touch', 'vsync', 'android'],
    install_requires=[
        'numpy',
    ],
    extras_require={
        'pandas': ['pandas'],
        'test': ['pandas', 'pytest'],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: Apache Software License',
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
