import os

from setuptools import find_packages, setup


here = os.path.abspath(os.path.dirname(__file__))

about = {}
with open(os.path.join(here, "yakusoku", "__version__.py")) as f:
    exec(f.read(), about)


def read(filename):
    with open(os.path.join(here, filename), 'rb') as f:
        return f.read().decode('utf-8')


setup(
    name='yakusoku',
    version=about['__version__'],
    description=('Consumer driven contract testing: record expected HTTP interactions,'
                 ' exercise them against a local mock provider and write Pact contract files.'),
    long_description=read('README.md'),
    long_description_content_type='text/markdown',
    author='Yakusoku contributors',
    entry_points='''
        [console_scripts]
        yakusoku=yakusoku.command_line:main

        [pytest11]
        yakusoku=yakusoku.pytest_plugin
    ''',
    install_requires=[
        'semver>=3',
        'colorama',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
            'requests',
        ],
    },
    packages=find_packages(),
    python_requires='>=3.7',
    license='MIT',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Testing',
        'Topic :: Software Development :: Testing :: Mocking',
        'Topic :: Software Development :: Testing :: Acceptance',
    ]
)
