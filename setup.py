"""
Setup script for the plastic-strength Bayesian regression package
"""

from setuptools import setup, find_packages

setup(
    name='plastic-strength-bayes',
    version='0.1.0',
    description='Bayesian regression of plastic strength on temperature and pressure, '
                'with MCMC sampling and DIC model comparison',
    license='MIT',

    # Package discovery from src/
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    python_requires='>=3.10',

    install_requires=[
        'numpy>=1.24.0',
        'scipy>=1.10.0',
        'matplotlib>=3.5.0',
        'seaborn>=0.12.0',
        'pandas>=1.5.0,<3',
        'tqdm>=4.62.0',
        'pymc>=5.16.0,<6',
        'arviz>=0.16.0,<1.0',
    ],

    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=3.0.0',
            'black>=22.0.0',
            'flake8>=4.0.0',
        ],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Mathematics',
    ],

    keywords='bayesian-inference mcmc regression pymc dic materials',
)
