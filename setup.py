from setuptools import setup, find_packages
from codecs import open

setup(
    name='openid-rp',
    version='0.1.0',
    description='OpenID 2.0 relying party: discovery, redirect and stateless verification.',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    license='Apache',
    keywords='openid consumer relying party',

    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
        'Framework :: AsyncIO',
    ],

    python_requires='>=3.8',
    install_requires=['html5lib', 'httpx', 'lxml'],
    packages=find_packages(exclude=['examples', 'openid_rp.test']),
)
