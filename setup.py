from setuptools import setup


def readme():
    with open('README.rst') as f:
        return f.read()


setup(
    name='mattab',
    version='0.1.0',
    author='Jacob Svensson',
    author_email='jacob@nephics.com',
    packages=['mattab'],
    license='MIT License',
    description='Read and write tabular datasets in the Matlab (TM) '
                'MAT-file format.',
    long_description=readme(),
    python_requires='>=3.6',
    entry_points={
        'console_scripts': ['mattab=mattab.cmd:main']
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering'
    ]
)
